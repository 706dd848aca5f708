"""
Placeholder handling for SQL text sent to the driver.

Statements are written with qmark (``?``) placeholders. psycopg expects
``%s``, so before execution the text is tokenized once and:

- ``?`` outside string literals becomes ``%s`` (PostgreSQL)
- ``%s`` outside string literals becomes ``?`` (SQLite)
- bare ``%`` inside string literals is doubled for PostgreSQL, since psycopg
  treats ``%`` as a format marker whenever parameters are supplied
"""
import re
from dataclasses import dataclass
from enum import Enum, auto

__all__ = [
    'tokenize_sql',
    'standardize_placeholders',
]


class TokenType(Enum):
    """Token types identified during SQL scanning."""
    SQL_TEXT = auto()
    STRING_LITERAL = auto()
    POSITIONAL_PH = auto()      # %s or ?


@dataclass(slots=True)
class Token:
    """Token from SQL scanning."""
    type: TokenType
    text: str


_TOKENIZE = re.compile(r"""
    (?P<string>'(?:[^']|'')*'|"(?:[^"]|"")*")
    |(?P<percent_s>%s)
    |(?P<qmark>\?)
""", re.VERBOSE)

# Unescaped percent signs in string content
_UNESCAPED_PERCENT = re.compile(r'(?<!%)%(?![%s(])')


def tokenize_sql(sql: str) -> list[Token]:
    """Split SQL into literal, placeholder and plain text tokens.

    Parameters
        sql: SQL query string

    Returns
        List of tokens preserving all SQL text
    """
    tokens = []
    last_end = 0

    for match in _TOKENIZE.finditer(sql):
        start, end = match.span()
        if start > last_end:
            tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:start]))
        if match.group('string'):
            ttype = TokenType.STRING_LITERAL
        else:
            ttype = TokenType.POSITIONAL_PH
        tokens.append(Token(ttype, match.group(0)))
        last_end = end

    if last_end < len(sql):
        tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:]))

    return tokens


def _escape_percent_in_literal(literal: str) -> str:
    quote = literal[0]
    content = literal[1:-1]
    escaped = _UNESCAPED_PERCENT.sub('%%', content)
    return f'{quote}{escaped}{quote}'


def standardize_placeholders(sql: str, dialect: str | None = 'postgresql',
                             with_params: bool = True) -> str:
    """Convert placeholders between ? and %s based on dialect.

    Unknown dialects get the SQL back unchanged, and so does PostgreSQL SQL
    executed without parameters (psycopg sends it verbatim).

    Parameters
        sql: SQL query string
        dialect: Database dialect ('postgresql' or 'sqlite')
        with_params: Whether parameters accompany the SQL

    Returns
        SQL with standardized placeholders
    """
    if not sql or dialect not in {'postgresql', 'sqlite'}:
        return sql

    if dialect == 'sqlite':
        if '%s' not in sql:
            return sql
        placeholder = '?'
    else:
        if not with_params or ('?' not in sql and '%' not in sql):
            return sql
        placeholder = '%s'

    result = []
    for token in tokenize_sql(sql):
        if token.type == TokenType.POSITIONAL_PH:
            result.append(placeholder)
        elif token.type == TokenType.STRING_LITERAL and dialect == 'postgresql':
            result.append(_escape_percent_in_literal(token.text))
        else:
            result.append(token.text)
    return ''.join(result)
