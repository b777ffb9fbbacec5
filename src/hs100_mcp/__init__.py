"""Client for the ciphered JSON control protocol of HS100-class smart plugs.

Typical use::

    from hs100_mcp import HS100

    plug = HS100("192.168.0.10")
    plug.turn_on()
    print(plug.info().alias)

Lower-level access goes through :func:`execute`, which returns the whole
decoded reply document. All errors derive from :class:`HS100Error`.
"""

from .client import HS100, execute
from .errors import (
    HS100Error,
    TransportError,
    ProtocolError,
    FrameError,
    AbsentError,
    DeviceError,
)
