"""
PLY-based lexer for C# code

- Input: cleaned code from scan_source (comments, literals, directives and
  disabled text already blanked, offsets unchanged)
- Output: list of TokenObj(type, value, line, column, lexpos)
- Keywords mapped to token types; illegal characters become ERROR tokens
"""

import re
import sys
import traceback
from typing import List, NamedTuple

import ply.lex as lex

from remover_core.utils.log import get_logger

logger = get_logger("lexer")


#------TOKEN OBJECT------
class TokenObj(NamedTuple):
    type: str
    value: str
    line: int
    column: int
    lexpos: int


#------RESERVED KEYWORDS------
_reserved = {
    'abstract': 'ABSTRACT', 'as': 'AS', 'base': 'BASE', 'bool': 'BOOL', 'break': 'BREAK',
    'byte': 'BYTE', 'case': 'CASE', 'catch': 'CATCH', 'char': 'CHAR', 'checked': 'CHECKED',
    'class': 'CLASS', 'const': 'CONST', 'continue': 'CONTINUE', 'decimal': 'DECIMAL',
    'default': 'DEFAULT', 'delegate': 'DELEGATE', 'do': 'DO', 'double': 'DOUBLE',
    'else': 'ELSE', 'enum': 'ENUM', 'event': 'EVENT', 'explicit': 'EXPLICIT',
    'extern': 'EXTERN', 'false': 'FALSE', 'finally': 'FINALLY', 'fixed': 'FIXED',
    'float': 'FLOAT', 'for': 'FOR', 'foreach': 'FOREACH', 'goto': 'GOTO', 'if': 'IF',
    'implicit': 'IMPLICIT', 'in': 'IN', 'int': 'INT', 'interface': 'INTERFACE',
    'internal': 'INTERNAL', 'is': 'IS', 'lock': 'LOCK', 'long': 'LONG',
    'namespace': 'NAMESPACE', 'new': 'NEW', 'null': 'NULL', 'object': 'OBJECT',
    'operator': 'OPERATOR', 'out': 'OUT', 'override': 'OVERRIDE', 'params': 'PARAMS',
    'private': 'PRIVATE', 'protected': 'PROTECTED', 'public': 'PUBLIC',
    'readonly': 'READONLY', 'ref': 'REF', 'return': 'RETURN', 'sbyte': 'SBYTE',
    'sealed': 'SEALED', 'short': 'SHORT', 'sizeof': 'SIZEOF', 'stackalloc': 'STACKALLOC',
    'static': 'STATIC', 'string': 'STRING', 'struct': 'STRUCT', 'switch': 'SWITCH',
    'this': 'THIS', 'throw': 'THROW', 'true': 'TRUE', 'try': 'TRY', 'typeof': 'TYPEOF',
    'uint': 'UINT', 'ulong': 'ULONG', 'unchecked': 'UNCHECKED', 'unsafe': 'UNSAFE',
    'ushort': 'USHORT', 'using': 'USING', 'virtual': 'VIRTUAL', 'void': 'VOID',
    'volatile': 'VOLATILE', 'while': 'WHILE',
}

#-----Token names required by PLY------
tokens = [
    #IDENTIFIER AND LITERALS
    'IDENTIFIER', 'INT_CONST', 'REAL_CONST',

    #OPERATORS
    'PLUS', 'MINUS', 'TIMES', 'DIVIDE', 'MOD',
    'INC', 'DEC',
    'ASSIGN', 'PLUS_ASSIGN', 'MINUS_ASSIGN', 'MUL_ASSIGN', 'DIV_ASSIGN', 'MOD_ASSIGN',
    'AND_ASSIGN', 'OR_ASSIGN', 'XOR_ASSIGN', 'LSHIFT_ASSIGN', 'COALESCE_ASSIGN',
    'EQ', 'NEQ', 'LT', 'GT', 'LE', 'GE',
    'AND', 'OR', 'NOT',
    'BAND', 'BOR', 'BXOR', 'BNOT',
    'LSHIFT',
    'ARROW', 'LAMBDA', 'DOT', 'RANGE', 'COALESCE', 'COND_ACCESS', 'SCOPE',

    #PUNCTUATORS
    'LPAREN', 'RPAREN', 'LBRACE', 'RBRACE', 'LBRACKET', 'RBRACKET',
    'SEMICOLON', 'COMMA', 'COLON', 'QUESTION',

] + list(_reserved.values())

#-------SIMPLE TOKEN REGEXES--------
t_PLUS = r'\+'
t_MINUS = r'-'
t_TIMES = r'\*'
t_DIVIDE = r'/'
t_MOD = r'%'

t_INC = r'\+\+'
t_DEC = r'--'

t_ASSIGN = r'='
t_PLUS_ASSIGN = r'\+='
t_MINUS_ASSIGN = r'-='
t_MUL_ASSIGN = r'\*='
t_DIV_ASSIGN = r'/='
t_MOD_ASSIGN = r'%='
t_AND_ASSIGN = r'&='
t_OR_ASSIGN = r'\|='
t_XOR_ASSIGN = r'\^='
t_LSHIFT_ASSIGN = r'<<='
t_COALESCE_ASSIGN = r'\?\?='

t_EQ = r'=='
t_NEQ = r'!='
t_LT = r'<'
t_GT = r'>'
t_LE = r'<='
t_GE = r'>='

t_AND = r'&&'
t_OR = r'\|\|'
t_NOT = r'!'

t_BAND = r'&'
t_BOR = r'\|'
t_BXOR = r'\^'
t_BNOT = r'~'

# '>>' is left as two GT tokens so nested generics close cleanly
t_LSHIFT = r'<<'

t_ARROW = r'->'
t_LAMBDA = r'=>'
t_DOT = r'\.'
t_RANGE = r'\.\.'
t_COALESCE = r'\?\?'
t_COND_ACCESS = r'\?\.'
t_SCOPE = r'::'

t_LPAREN = r'\('
t_RPAREN = r'\)'
t_LBRACE = r'\{'
t_RBRACE = r'\}'
t_LBRACKET = r'\['
t_RBRACKET = r'\]'

t_SEMICOLON = r';'
t_COMMA = r','
t_COLON = r':'
t_QUESTION = r'\?'

#----IGNORED CHARS (SPACES/TABS)-----
t_ignore = ' \t\r\f\v'


# ---------------- Complex tokens: order matters ----------------

def t_REAL_CONST(t):
    r'((\d[\d_]*)?\.\d[\d_]*([eE][+-]?\d+)?[fFdDmM]?|\d[\d_]*([eE][+-]?\d+[fFdDmM]?|[fFdDmM]))'
    return t


#HEXADECIMAL integer literal
def t_INT_CONST_HEX(t):
    r'0[xX][0-9a-fA-F_]+([uU][lL]?|[lL][uU]?)?'
    t.type = 'INT_CONST'
    return t


#BINARY literal
def t_INT_CONST_BIN(t):
    r'0[bB][01_]+([uU][lL]?|[lL][uU]?)?'
    t.type = 'INT_CONST'
    return t


#DECIMAL integer
def t_INT_CONST_DEC(t):
    r'\d[\d_]*([uU][lL]?|[lL][uU]?)?'
    t.type = 'INT_CONST'
    return t


#IDENTIFIER and KEYWORDS ('@' escapes a keyword)
def t_IDENTIFIER(t):
    r'@?[^\W\d]\w*'
    t.type = _reserved.get(t.value, 'IDENTIFIER')
    return t


#NEWLINE (track line numbers)
def t_newline(t):
    r'\n+'
    t.lexer.lineno += len(t.value)


#ERROR HANDLING RULE
def t_error(t):
    bad_char = t.value[0]
    col = _find_column(t.lexer.lexdata, t)
    logger.debug(f"Illegal character {bad_char!r} at line {t.lineno} col {col}")
    #create an ERROR token so the syntax check can report it
    t.type = 'ERROR'
    t.value = bad_char
    t.lexer.skip(1)
    return t


#---------HELPER: compute column------------
def _find_column(input_text: str, token) -> int:
    last_cr = input_text.rfind('\n', 0, token.lexpos)
    return token.lexpos - last_cr


#-------MAIN API: LEX_CODE--------

_lexer = lex.lex(module=sys.modules[__name__], reflags=int(re.VERBOSE | re.UNICODE))


def build_lexer():
    """Fresh lexer instance so no state carries over between calls."""
    return _lexer.clone()


def lex_code(cleaned_code: str) -> List[TokenObj]:
    """
    Tokenize cleaned_code and return a list of TokenObj.
    """
    logger.debug("lex_code started")
    try:
        lexer = build_lexer()
        lexer.lineno = 1
        lexer.input(cleaned_code)
        result: List[TokenObj] = []
        for tok in lexer:
            col = _find_column(cleaned_code, tok)
            result.append(TokenObj(tok.type, str(tok.value), tok.lineno, col, tok.lexpos))
        logger.debug(f"lex_code finished, tokens = {len(result)}")
        return result
    except Exception as e:
        logger.error("lex_code failed: %s", e)
        logger.debug(traceback.format_exc())
        raise
