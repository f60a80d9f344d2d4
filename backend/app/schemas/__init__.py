from .friendship import *
