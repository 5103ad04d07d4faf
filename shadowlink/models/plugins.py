"""Plugin option strings attached to profiles.

A profile's ``plugin`` field holds a serialized plugin configuration:
one plugin per line, each line in the form ``id;key=value;flag``.
Backslash escapes ``\\``, ``=`` and ``;`` inside ids, keys and values.

Example:
    >>> options = PluginOptions.parse("obfs-local;obfs=http;obfs-host=example.com")
    >>> options.id, options["obfs"]
    ('obfs-local', 'http')
"""

ESCAPED_CHARS = frozenset("\\=;")


def _escape(text: str) -> str:
    return "".join(f"\\{char}" if char in ESCAPED_CHARS else char for char in text)


class PluginOptions(dict[str, str | None]):
    """Options for a single plugin.

    Keys map to their value, or to None for flags without a value.
    Entry order is preserved when rendering back to text.
    """

    def __init__(self, id: str = "", entries: dict[str, str | None] | None = None) -> None:
        super().__init__(entries or {})
        self.id = id

    @classmethod
    def parse(cls, options: str | None, parse_id: bool = True) -> "PluginOptions":
        """Parse an options string.

        Args:
            options: Text in ``id;key=value;flag`` form
            parse_id: Treat the first bare entry as the plugin id

        Returns:
            Parsed PluginOptions (empty when options is empty)
        """
        result = cls()
        if not options:
            return result

        current: list[str] = []
        key: str | None = None
        first_entry = parse_id
        chars = iter(f"{options};")
        for char in chars:
            if char == "\\":
                current.append(next(chars, ""))
            elif char == "=" and key is None:
                key = "".join(current)
                current.clear()
            elif char == ";":
                text = "".join(current)
                if key is not None:
                    result[key] = text
                    key = None
                elif text:
                    if first_entry:
                        result.id = text
                    else:
                        result[text] = None
                current.clear()
                first_entry = False
            else:
                current.append(char)
        return result

    @classmethod
    def with_id(cls, id: str, options: str | None) -> "PluginOptions":
        """Build options for a known plugin id from an id-less options string."""
        result = cls.parse(options, parse_id=False)
        result.id = id
        return result

    def to_string(self, trim_id: bool = True) -> str:
        """Render options back to text.

        Args:
            trim_id: Omit the plugin id prefix

        Returns:
            Options text; empty when trim_id is False and there is no id
        """
        parts: list[str] = []
        if not trim_id:
            if not self.id:
                return ""
            parts.append(_escape(self.id))
        for key, value in self.items():
            parts.append(_escape(key) if value is None else f"{_escape(key)}={_escape(value)}")
        return ";".join(parts)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"PluginOptions(id={self.id!r}, entries={dict(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PluginOptions):
            return NotImplemented
        return self.id == other.id and super().__eq__(other)

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    __hash__ = None  # type: ignore[assignment]


class PluginConfiguration:
    """All plugin options stored in a profile, with one selected plugin.

    The first line of the serialized form is the selected plugin.
    """

    def __init__(self, plugin: str | None = "") -> None:
        plugins = [PluginOptions.parse(line) for line in (plugin or "").split("\n")]
        self.plugins_options: dict[str, PluginOptions] = {options.id: options for options in plugins if options.id}
        self.selected = plugins[0].id if plugins else ""

    def get_options(self, id: str | None = None) -> PluginOptions:
        """Options of the given plugin (default: the selected one)."""
        if id is None:
            id = self.selected
        if not id:
            return PluginOptions()
        options = self.plugins_options.get(id)
        if options is None:
            return PluginOptions(id)
        return options

    def __str__(self) -> str:
        ordered = [options for id, options in self.plugins_options.items() if id == self.selected]
        ordered += [options for id, options in self.plugins_options.items() if id != self.selected]
        if self.selected not in self.plugins_options:
            ordered.insert(0, self.get_options())
        return "\n".join(options.to_string(trim_id=False) for options in ordered)
