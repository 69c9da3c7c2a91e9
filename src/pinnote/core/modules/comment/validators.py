from pinnote.errors import ValidationError

COORDINATE_MIN = 0.0
COORDINATE_MAX = 100.0


def validate_comment_shape(body: str, x: float | None, y: float | None, has_parent: bool) -> None:
    """Validate a new comment is exactly one of: positioned top-level comment or reply.

    Raises:
        ValidationError: If the body is blank or the coordinates/parent combination is invalid
    """
    if not body or not body.strip():
        raise ValidationError("Field 'body' must not be empty")

    if (x is None) != (y is None):
        missing = "y" if y is None else "x"
        raise ValidationError(f"Field '{missing}' is required when the other coordinate is given")

    positioned = x is not None
    if positioned and has_parent:
        raise ValidationError("Field 'parentId' cannot be combined with coordinates (x, y)")
    if not positioned and not has_parent:
        raise ValidationError("Coordinates (x, y) are required for top-level comments")

    for name, value in (("x", x), ("y", y)):
        if value is not None and not COORDINATE_MIN <= value <= COORDINATE_MAX:
            raise ValidationError(f"Field '{name}' must be between {COORDINATE_MIN:g} and {COORDINATE_MAX:g}")
