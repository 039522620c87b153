from .picker import Picker
