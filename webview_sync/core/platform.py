from enum import Enum

from .exceptions import InvalidPlatformError, MissingPlatformError


class Platform(str, Enum):
    """构建目标平台"""

    IOS = "ios"
    ANDROID = "android"

    @classmethod
    def parse(cls, token) -> "Platform":
        # exact, case-sensitive match
        if token is None:
            raise MissingPlatformError()
        for member in cls:
            if member.value == token:
                return member
        raise InvalidPlatformError(token)

    def __str__(self):
        return self.value
