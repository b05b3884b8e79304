"""fwrules: declarative firewall rule compiler and chain lifecycle manager."""

__version__ = "0.1.0"
