"""Protocol layer: cipher, framing, command builders, and response parsing."""

from .cipher import encrypt, decrypt
from .framing import build_frame, read_frame, parse_frame
from .commands import Command, Module, build_command
from .parser import decode_response, extract_leaf, check_leaf
