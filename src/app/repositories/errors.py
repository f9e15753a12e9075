class DuplicateTokenError(Exception):
    """A generated token collided with an existing unique value"""


class DuplicateUserError(Exception):
    """The email is already registered in the tenant"""
