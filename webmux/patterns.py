"""Regex patterns for template parsing and expression anchoring."""

import re

# Pattern matching expressions
capture_segment = re.compile(r"^:(?P<name>.*)$")
inline_flags = re.compile(r"^\(\?[aiLmsux]+\)")
left_anchor = re.compile(r"^(\^|\\A)")
regex_special = re.compile(r"[.^$*+?{}\[\]\\|()]")
