"""teafinder: nearby tea shop search backend."""
