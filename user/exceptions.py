class InvalidTokenException(Exception):
    pass
