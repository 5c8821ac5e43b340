"""hamlet6to7 - migrate Hamlet, Cassius and Julius templates from 0.6 to 0.7 syntax"""

__version__ = "0.7.0"
