"""Syntactic validation of download targets."""

from pydantic import AnyUrl, TypeAdapter, ValidationError

from .errors import InvalidURLFormat, MissingURL
from .protocols import FetchRequest

_url_adapter = TypeAdapter(AnyUrl)


def validate_url(raw: object, missing_message: str = "URL is required") -> FetchRequest:
    """
    Validate a raw URL field taken from a JSON body or query string.

    No network access happens here. Raises MissingURL for absent or blank
    input and InvalidURLFormat for anything that is not an absolute URL with
    both a scheme and a host.
    """
    if raw is None:
        raise MissingURL(missing_message)
    if not isinstance(raw, str):
        raise InvalidURLFormat(raw)

    url = raw.strip()
    if not url:
        raise MissingURL(missing_message)

    try:
        parsed = _url_adapter.validate_python(url)
    except ValidationError as e:
        raise InvalidURLFormat(url) from e

    # mailto: and similar parse fine but have nothing to navigate to
    if not parsed.host:
        raise InvalidURLFormat(url)

    return FetchRequest(url=url)
