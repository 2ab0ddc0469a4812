import re

# "(.)" + capitalized word: splits before a word that follows anything, e.g. "Profile|Img"
_MATCH_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
# lower/digit followed by a capital: splits acronym runs off the previous word, e.g. "Img|URL"
_MATCH_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")


def to_snake_case(name: str) -> str:
    """
    Convert a mixed-case identifier to lowercase_underscore form.

        >>> to_snake_case("ProfileImgURL")
        'profile_img_url'
        >>> to_snake_case("followers_count")
        'followers_count'

    An acronym directly followed by a capitalized word keeps only its last capital with that
    word ("URLsCount" -> "ur_ls_count"); identifiers of that shape must be checked by hand.
    """
    snake = _MATCH_FIRST_CAP.sub(r"\1_\2", name)
    snake = _MATCH_ALL_CAP.sub(r"\1_\2", snake)
    return snake.lower()
