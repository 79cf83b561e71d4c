VERSION = "0.4.1"
