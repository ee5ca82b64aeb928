"""Column annotations for pydantic models.

A model declares its table columns with ``Annotated[T, Column("...")]``.
The tag string follows the format::

    "<column_name> <column_type> [options...]"

Options:

    pk                      - Primary key (several pk columns form a composite key)
    ai                      - Auto increment
    null                    - Nullable
    unsigned                - Append ``unsigned`` to the type
    def(<value>)            - Default value
    arr(<delimiter>)        - Store a list as delimited text (default delimiter ``,``)
    json                    - Store as JSON text
    yaml                    - Store as YAML text
    unique(<index_name>)    - Part of a unique index
    index(<index_name>)     - Part of a plain index
    comment(<text>)         - Column comment

The first token is always the column name; ``-`` uses the attribute
name.  The index name defaults to ``idx_<column_name>``.
A ``)`` inside a parameter is escaped with a backslash.  Options are
separated by spaces, so parameters cannot contain spaces.

Column types (default length in parentheses):

    tinyint(4) int(11) bigint(20) float double decimal(10,0) varchar(64)
    text mediumtext longtext blob mediumblob longblob timestamp datetime date

Usage:
    from typing import Annotated
    from pydantic import BaseModel
    from sqlschema.mapping.tags import Column

    class User(BaseModel):
        id: Annotated[int, Column("id bigint pk ai")] = 0
        name: Annotated[str, Column("name varchar(128) unique(uk_name)")] = ""
        tags: Annotated[list[str], Column("tags arr(|)")] = []
"""

from dataclasses import dataclass
from enum import Enum


class SerializeMethod(str, Enum):
    """How a Python value is stored in its column."""

    NONE = "none"
    ARRAY = "array"
    JSON = "json"
    YAML = "yaml"


class IndexType(str, Enum):
    NONE = "none"
    INDEX = "index"
    UNIQUE = "unique"
    PRIMARY_KEY = "primary_key"


# Type options: name -> default parameter (None = no parameter)
TYPE_DEFAULTS: dict[str, str | None] = {
    "tinyint": "4",
    "int": "11",
    "bigint": "20",
    "float": None,
    "double": None,
    "decimal": "10,0",
    "varchar": "64",
    "text": None,
    "mediumtext": None,
    "longtext": None,
    "blob": None,
    "mediumblob": None,
    "longblob": None,
    "timestamp": None,
    "datetime": None,
    "date": None,
}


@dataclass
class ColumnSpec:
    """Parsed column tag.  Empty strings mean "not given"."""

    column_name: str = ""
    data_type: str = ""
    primary_key: bool = False
    auto_increment: bool = False
    nullable: bool = False
    unsigned: bool = False
    default: str | None = None
    serialize: SerializeMethod = SerializeMethod.NONE
    delimiter: str = ","
    index_type: IndexType = IndexType.NONE
    index_name: str = ""
    comment: str = ""


def _unescape_parameter(text: str) -> str:
    """Read a parameter up to the closing ``)``, honouring ``\\`` escapes."""
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            out.append(text[i + 1])
            i += 2
            continue
        if ch == ")":
            break
        out.append(ch)
        i += 1
    return "".join(out)


def parse_option(token: str) -> tuple[str, str | None]:
    """Split ``name(param)`` into ``("name", "param")``.

    Example:
        >>> parse_option("varchar(255)")
        ('varchar', '255')
        >>> parse_option("pk")
        ('pk', None)
    """
    start = token.find("(")
    if start < 0:
        return token, None
    return token[:start], _unescape_parameter(token[start + 1:])


def parse_tag(tag: str) -> ColumnSpec:
    """Parse a column tag into a ``ColumnSpec``.

    Raises:
        ValueError: On an unknown option.

    Example:
        >>> spec = parse_tag("id bigint pk ai")
        >>> (spec.column_name, spec.data_type, spec.primary_key, spec.auto_increment)
        ('id', 'bigint(20)', True, True)
    """
    spec = ColumnSpec()
    tokens = [t for t in tag.split(" ") if t]

    if tokens:
        first = tokens.pop(0)
        if first != "-":
            spec.column_name = first

    for token in tokens:
        name, param = parse_option(token)
        if name == "pk":
            spec.primary_key = True
            spec.index_type = IndexType.PRIMARY_KEY
        elif name == "ai":
            spec.auto_increment = True
        elif name == "null":
            spec.nullable = True
        elif name == "unsigned":
            spec.unsigned = True
        elif name == "def":
            spec.default = param or ""
        elif name == "arr":
            spec.serialize = SerializeMethod.ARRAY
            spec.delimiter = param or ","
        elif name == "json":
            spec.serialize = SerializeMethod.JSON
        elif name == "yaml":
            spec.serialize = SerializeMethod.YAML
        elif name == "unique":
            spec.index_type = IndexType.UNIQUE
            spec.index_name = param or ""
        elif name == "index":
            spec.index_type = IndexType.INDEX
            spec.index_name = param or ""
        elif name == "comment":
            spec.comment = param or ""
        elif name in TYPE_DEFAULTS:
            default_param = TYPE_DEFAULTS[name]
            value = param or default_param
            spec.data_type = f"{name}({value})" if value else name
        else:
            raise ValueError(f"Unknown column option {name!r} in tag {tag!r}")

    if spec.unsigned and spec.data_type:
        spec.data_type += " unsigned"
    return spec


class Column:
    """Column declaration attached to a model attribute via ``Annotated``.

    The tag is parsed on construction, so a bad tag fails when the model
    class is defined.

    Example:
        >>> Column("age int def(0)").spec.default
        '0'
    """

    def __init__(self, tag: str = ""):
        self.tag = tag
        self.spec = parse_tag(tag)

    def __repr__(self) -> str:
        return f"Column({self.tag!r})"
