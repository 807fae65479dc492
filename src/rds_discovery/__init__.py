"""Zabbix low-level discovery of RDS database instances."""

__version__ = "0.3.0"
