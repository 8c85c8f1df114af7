from dataclasses import dataclass

SEARCH_FORM_POST_TYPE = "custom_search_form"
TREND_ALERT_POST_TYPE = "trend-alert"


@dataclass(frozen=True)
class ContentType:
    name: str
    label: str
    public: bool = True


class ContentTypeRegistry:
    """
    Registered content types, in registration order.

    Public types are the ones an administrator can pick for a search scope,
    and the only values a scope submission may contain.
    """

    def __init__(self):
        self._types: dict[str, ContentType] = {}

    def register(self, name: str, label: str, public: bool = True) -> ContentType:
        content_type = ContentType(name=name, label=label, public=public)
        self._types[name] = content_type
        return content_type

    def list_public_content_types(self) -> list[ContentType]:
        return [t for t in self._types.values() if t.public]

    def public_names(self) -> list[str]:
        return [t.name for t in self.list_public_content_types()]

    def is_public(self, name: str) -> bool:
        content_type = self._types.get(name)
        return content_type is not None and content_type.public


def build_default_registry() -> ContentTypeRegistry:
    registry = ContentTypeRegistry()
    registry.register("post", "Posts")
    registry.register("page", "Pages")
    registry.register(TREND_ALERT_POST_TYPE, "Trend Alerts")
    registry.register(SEARCH_FORM_POST_TYPE, "Search Forms", public=False)
    return registry


registry = build_default_registry()
