import os

PROMPT = "$ "

HISTFILE = os.getenv("HISTFILE")
SEARCH_PATH = os.getenv("PATH", os.defpath)
HOME = os.getenv("HOME") or os.path.expanduser("~")

LOG_LEVEL = os.getenv("PIPESHELL_LOG_LEVEL", "WARNING")
LOG_FILE = os.getenv("PIPESHELL_LOG_FILE")

# bytes per read in stream forwarding
CHUNK_SIZE = 8192
