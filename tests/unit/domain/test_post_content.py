import pytest

from social_publisher.domain.value_objects import Platform, PostContent, build_message


class TestBuildMessage:
    def test_hashtags_appended_after_blank_line(self):
        assert build_message("Hello", ["#a", "#b"]) == "Hello\n\n#a #b"

    def test_no_hashtags_returns_text_unchanged(self):
        assert build_message("Hello", []) == "Hello"
        assert build_message("Hello", None) == "Hello"

    def test_hashtags_kept_verbatim_and_in_order(self):
        assert build_message("Launch", ["#Zeta", "alpha", "#Zeta"]) == "Launch\n\n#Zeta alpha #Zeta"

    def test_text_is_not_stripped(self):
        assert build_message("  spaced  ", ["#x"]) == "  spaced  \n\n#x"


class TestPostContent:
    def test_message_property(self):
        content = PostContent(text="Launch day!", hashtags=["#new"])

        assert content.message == "Launch day!\n\n#new"
        assert content.hashtags == ("#new",)

    def test_has_image(self):
        assert PostContent(text="x", image_url="https://example.com/a.jpg").has_image
        assert not PostContent(text="x").has_image
        assert not PostContent(text="x", image_url="").has_image


class TestPlatform:
    def test_parse_is_case_insensitive(self):
        assert Platform.parse("LinkedIn") == Platform.LINKEDIN
        assert Platform.parse(" facebook ") == Platform.FACEBOOK

    def test_parse_passes_enum_through(self):
        assert Platform.parse(Platform.INSTAGRAM) is Platform.INSTAGRAM

    def test_parse_unknown_raises(self):
        with pytest.raises(ValueError, match="Unsupported platform: tiktok"):
            Platform.parse("tiktok")

    def test_display_name(self):
        assert Platform.LINKEDIN.display_name == "LinkedIn"
