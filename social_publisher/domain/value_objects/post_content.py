from dataclasses import dataclass, field


def build_message(text: str, hashtags: list[str] | tuple[str, ...] | None = None) -> str:
    """Combine post text and hashtags into the message sent to a platform.

    Hashtags are appended verbatim, in order, after a blank line.
    """
    if not hashtags:
        return text
    return f"{text}\n\n{' '.join(hashtags)}"


@dataclass(frozen=True)
class PostContent:
    """Value object for the publishable part of a post."""

    text: str
    hashtags: tuple[str, ...] = field(default_factory=tuple)
    image_url: str | None = None

    def __post_init__(self) -> None:
        # Accept lists from callers but keep the value object hashable
        object.__setattr__(self, "hashtags", tuple(self.hashtags or ()))

    @property
    def message(self) -> str:
        return build_message(self.text, self.hashtags)

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)
