"""Translation of the expression IR into solver terms."""

from symir.translation.z3_translator import Z3Translator

__all__ = ["Z3Translator"]
