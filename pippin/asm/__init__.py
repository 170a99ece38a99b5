from .validator import (
    Diagnostic, SourceSyntaxError, SyntaxValidator, ValidationResult,
    parse_hex_word, validate, validate_file,
)
