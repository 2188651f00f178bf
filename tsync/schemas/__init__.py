from .message import *
from .relationship import *
from .responses import *
