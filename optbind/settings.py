from attrs import field

from optbind.utils import frozen


@frozen(kw_only=True)
class ParserSettings:
    """Behavior switches for a :class:`~optbind.Parser`.

    Settings never affect the cached :class:`~optbind.descriptor.DescriptorCatalog`,
    so parsers with different settings safely share catalogs.
    """

    case_sensitive: bool = False
    """Match option names and enum member names exactly."""

    ignore_unknown_arguments: bool = True
    """Skip unmatched option keys and positional values instead of failing the parse."""

    strip_comments: bool = False
    """When tokenizing a raw line, drop everything after :attr:`comment_marker`."""

    comment_marker: str = field(default="#")

    @comment_marker.validator
    def _comment_marker_validator(self, attribute, value):
        if not value:
            raise ValueError("comment_marker must be a non-empty string.")
