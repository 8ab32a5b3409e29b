"""Hardware-free stand-ins for enumerators and sysfs."""
