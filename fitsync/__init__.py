"""FitSync : passerelle de session et de synchronisation du client fitness."""

__version__ = "0.1.0"
