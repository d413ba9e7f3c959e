"""CORE search cache: query compiler, Redis result cache and search client."""
