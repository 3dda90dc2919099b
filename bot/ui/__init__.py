from .discord import *
