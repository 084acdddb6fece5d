"""Implementation of the Session Description Protocol (SDP) model."""

from .assembler import *
from .attributes import *
from .common import *
from .fields import *
from .media import *
from .serializer import *
from .session import *
from .time import *
