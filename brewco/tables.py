"""Static keyword, operator and builtin tables.

These tables drive the lexer and are also what editor tooling reads for
completion and hover text.  Nothing in here depends on evaluator state.
"""
from typing import Dict, List, Optional

# Decorative line-comment marker (U+1F380 RIBBON), matched as one unit.
COMMENT_MARKER = '\U0001F380'

# spelling -> canonical token kind
KEYWORDS: Dict[str, str] = {
    'beans': 'LET',
    'bean': 'CLASS',
    'class': 'CLASS',
    'brew': 'FN',
    'fn': 'FN',
    'function': 'FN',
    'blend': 'EXTENDS',
    'extends': 'EXTENDS',
    'taste': 'IF',
    'if': 'IF',
    'otherwise': 'ELSE',
    'else': 'ELSE',
    'steep': 'WHILE',
    'while': 'WHILE',
    'pour': 'FOR',
    'for': 'FOR',
    'foreach': 'FOREACH',
    'in': 'IN',
    'roast': 'SWITCH',
    'switch': 'SWITCH',
    'default': 'DEFAULT',
    'serve': 'RETURN',
    'serve_back': 'RETURN',
    'return': 'RETURN',
    'break': 'BREAK',
    'continue': 'CONTINUE',
    'this': 'THIS',
    'super': 'SUPER',
    'new': 'NEW',
    'recipe': 'RECIPE',
    'coffee_recipe': 'RECIPE',
    'interface': 'RECIPE',
    'taste_carefully': 'TRY',
    'try': 'TRY',
    'if_spilled': 'CATCH',
    'catch': 'CATCH',
    'grind': 'IMPORT',
    'import': 'IMPORT',
    'as': 'AS',
    'pourout': 'PRINT',
    'brew_time': 'SLEEP',
    'true': 'TRUE',
    'false': 'FALSE',
    'null': 'NULL',
}

# Alphabetic operator words; they lex to the same kind as their symbol.
OPERATOR_WORDS: Dict[str, str] = {
    'add': 'PLUS',
    'sip': 'MINUS',
    'brew_op': 'STAR',
    'brewop': 'STAR',
    'pour_op': 'SLASH',
    'pourop': 'SLASH',
    'grounds': 'PERCENT',
    'same_blend': 'EQ',
    'different_blend': 'NE',
    'less_caffeine': 'LT',
    'more_caffeine': 'GT',
    'not_stronger': 'LE',
    'not_weaker': 'GE',
    'with': 'AND',
    'or': 'OR',
    'no_foam': 'NOT',
    'pour_in': 'ASSIGN',
    'refill_with': 'ASSIGN',
    'blend_with': 'BITAND',
    'top_with': 'BITOR',
    'spice': 'BITXOR',
    'invert': 'BITNOT',
    'double_shot': 'SHL',
    'half_caf': 'SHR',
}

# Symbol spellings, longest first so the lexer can match greedily.
SYMBOLS: Dict[str, str] = {
    '==': 'EQ',
    '!=': 'NE',
    '<=': 'LE',
    '>=': 'GE',
    '<<': 'SHL',
    '>>': 'SHR',
    '&&': 'AND',
    '||': 'OR',
    '<-': 'ASSIGN',
    '->': 'ARROW',
    '+': 'PLUS',
    '-': 'MINUS',
    '*': 'STAR',
    '/': 'SLASH',
    '%': 'PERCENT',
    '<': 'LT',
    '>': 'GT',
    '!': 'NOT',
    '&': 'BITAND',
    '|': 'BITOR',
    '^': 'BITXOR',
    '~': 'BITNOT',
    '=': 'ASSIGN',
    '(': 'LPAREN',
    ')': 'RPAREN',
    '{': 'LBRACE',
    '}': 'RBRACE',
    '[': 'LBRACKET',
    ']': 'RBRACKET',
    ',': 'COMMA',
    '.': 'DOT',
    ':': 'COLON',
    ';': 'SEMI',
}

KEYWORD_DETAILS: Dict[str, str] = {
    'LET': 'Variable declaration',
    'CLASS': 'Bean (class) declaration',
    'FN': 'Brew (function) declaration',
    'EXTENDS': 'Inheritance',
    'IF': 'Conditional',
    'ELSE': 'Else clause / switch catch-all',
    'WHILE': 'While loop',
    'FOR': 'For loop (three-clause or for-each)',
    'FOREACH': 'For-each loop',
    'IN': 'Iterable marker in for-each loops',
    'SWITCH': 'Switch on a value',
    'DEFAULT': 'Switch catch-all',
    'RETURN': 'Return from a brew',
    'BREAK': 'Leave the nearest loop',
    'CONTINUE': 'Skip to the next loop iteration',
    'THIS': 'Current instance',
    'SUPER': 'Parent method or constructor',
    'NEW': 'Create a new instance',
    'RECIPE': 'Advisory interface declaration',
    'TRY': 'Guarded block',
    'CATCH': 'Spill handler',
    'IMPORT': 'Import a module',
    'AS': 'Import alias',
    'PRINT': 'Print output',
    'SLEEP': 'Pause for a number of seconds',
    'TRUE': 'Boolean literal',
    'FALSE': 'Boolean literal',
    'NULL': 'Empty value',
}

OPERATOR_DETAILS: Dict[str, str] = {
    'PLUS': 'Addition / concatenation (+)',
    'MINUS': 'Subtraction (-)',
    'STAR': 'Multiplication (*)',
    'SLASH': 'Division (/)',
    'PERCENT': 'Remainder (%)',
    'EQ': 'Equality (==)',
    'NE': 'Inequality (!=)',
    'LT': 'Less than (<)',
    'GT': 'Greater than (>)',
    'LE': 'Less or equal (<=)',
    'GE': 'Greater or equal (>=)',
    'AND': 'Logical AND (&&)',
    'OR': 'Logical OR (||)',
    'NOT': 'Logical NOT (!)',
    'ASSIGN': 'Assignment (<-)',
    'BITAND': 'Bitwise AND (&)',
    'BITOR': 'Bitwise OR (|)',
    'BITXOR': 'Bitwise XOR (^)',
    'BITNOT': 'Bitwise NOT (~)',
    'SHL': 'Shift left (<<)',
    'SHR': 'Shift right (>>)',
}


def builtin_catalog() -> List[Dict[str, str]]:
    """Return name/signature/description/category for every builtin."""
    from brewco.runtime.builtins import REGISTRY
    return [
        {
            'name': native.name,
            'signature': native.signature,
            'description': native.description,
            'category': native.category,
        }
        for native in REGISTRY.values()
    ]


def describe(word: str) -> Optional[Dict[str, str]]:
    """Hover text for a keyword, operator word or builtin name."""
    if word in KEYWORDS:
        kind = KEYWORDS[word]
        return {'name': word, 'kind': 'keyword', 'detail': KEYWORD_DETAILS[kind]}
    if word in OPERATOR_WORDS:
        kind = OPERATOR_WORDS[word]
        return {'name': word, 'kind': 'operator', 'detail': OPERATOR_DETAILS[kind]}
    for entry in builtin_catalog():
        if entry['name'] == word:
            return {
                'name': word,
                'kind': 'builtin',
                'detail': f"{entry['signature']} - {entry['description']}",
            }
    return None
