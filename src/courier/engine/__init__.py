"""State-transition engine — registrar, validator, flag rules."""

from courier.engine.flags import MessageFlags, check_flag_rules, decode_flags, encode_flags
from courier.engine.manager import MessageManager
from courier.engine.registrar import MAX_ELIGIBLE, EligibilityRegistrar
from courier.engine.validator import MessageValidator

__all__ = [
    "MessageFlags",
    "check_flag_rules",
    "decode_flags",
    "encode_flags",
    "MessageManager",
    "MAX_ELIGIBLE",
    "EligibilityRegistrar",
    "MessageValidator",
]
