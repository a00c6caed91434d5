"""Exception hierarchy for template analysis, value conversion and URL binding."""


class BindingError(Exception):
    """Base class for every error raised by atlas_url."""


class TemplateError(BindingError):
    """A path template cannot be turned into a binding plan."""


class UnterminatedPlaceholder(TemplateError):
    def __init__(self, template: str, position: int):
        self.template = template
        self.position = position
        super().__init__(f"Invalid URL pattern {template!r}: missing closing brace for '{{' at {position}")


class UndeclaredField(TemplateError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Placeholder {{{name}}} does not match any declared field")


class DuplicateField(TemplateError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Field {name!r} is declared more than once")


class OptionalPathField(TemplateError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Optional field {name!r} cannot be used as a path placeholder")


class BindError(BindingError):
    """A binding plan could not be rendered into a URL."""


class UrlParseError(BindError):
    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Cannot parse URL {url!r}: {reason}")


class SchemaMismatch(BindingError, TypeError):
    """A value does not have the shape its descriptor declares.

    This is a programming error in the caller, not bad user input.
    """

    def __init__(self, name: str, expected: str, got: object):
        self.name = name
        self.expected = expected
        self.got = got
        super().__init__(f"Field {name!r} expects {expected}, got {type(got).__name__}: {got!r}")


class ValueParseError(BindingError, ValueError):
    """Textual input could not be converted into field values."""


class MissingField(ValueParseError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing field: {field}")


class NoValuesInField(ValueParseError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Field '{field}' exists but contains no values")


class FieldParseError(ValueParseError):
    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"Failed to parse field '{field}' with value '{value}'")
