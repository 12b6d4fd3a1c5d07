from enum import Enum


class Platform(str, Enum):
    """Social platforms a post can be published to."""

    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    LINKEDIN = "linkedin"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: "str | Platform") -> "Platform":
        """Parse a platform name case-insensitively."""
        if isinstance(value, Platform):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unsupported platform: {value}") from None


_DISPLAY_NAMES = {
    Platform.FACEBOOK: "Facebook",
    Platform.INSTAGRAM: "Instagram",
    Platform.LINKEDIN: "LinkedIn",
}
