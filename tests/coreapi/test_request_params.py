from datetime import date

import pytest

from src.coreapi import DateFormatError, compile_query, criteria_from_params


def test_params_split_lists_and_parse_dates():
    criteria = criteria_from_params(
        {
            "abstract": "machine learning",
            "authors": "David, Peter ",
            "contributors": "Grace",
            "createdDate": "2020-05-01",
            "acceptedDate": "2020-04-01T12:00:00Z",
            "limit": "20",
            "yearPublished": "2020",
            "arxivId": "",
        }
    )

    assert criteria.authors == ("David", "Peter")
    assert criteria.contributors == ("Grace",)
    assert criteria.created_date.date() == date(2020, 5, 1)
    assert criteria.accepted_date.date() == date(2020, 4, 1)
    assert criteria.limit == 20
    assert criteria.arxiv_id is None
    assert compile_query(criteria).query == (
        "abstract:machine learning AND acceptedDate:2020-04-01 AND contributors:Grace"
        " AND createdDate:2020-05-01 AND yearPublished:2020 AND authors:David,Peter"
    )


@pytest.mark.parametrize("raw", ["ten", "-5"])
def test_invalid_limit_is_ignored(raw):
    assert criteria_from_params({"title": "x", "limit": raw}).limit == 0


def test_bad_date_param_raises():
    with pytest.raises(DateFormatError):
        criteria_from_params({"createdDate": "last week"})
