"""
Fixed parsing rules.

This file exists to make the parser's non-negotiable behavior explicit.
"""

import re

INPUT_ENCODING = "utf-8-sig"  # UTF-8, leading BOM dropped
DEFAULT_DELIMITER = ","
DEFAULT_QUOTE = '"'
LINE_TERMINATORS = ("\r", "\n")

# -?(0|[1-9]digits)(.digits)? with ASCII digits only; no exponent, no padding
NUMBER_PATTERN = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?")

DEFAULT_CHUNK_SIZE = 64 * 1024
ENCODING_ERROR_MODES = ("strict", "replace")

# charset detection on fewer bytes than this guesses more than it detects
DETECTION_SAMPLE_MIN = 64
DETECTION_SAMPLE_MAX = 32 * 1024
