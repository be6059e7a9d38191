ENV_HOSTS = 'SLOTDISPATCH_HOSTS'
ENV_COLORS = 'SLOTDISPATCH_COLORS'
ENV_MAXLOAD = 'SLOTDISPATCH_MAXLOAD'
ENV_RSH = 'SLOTDISPATCH_RSH'
ENV_HOME = 'SLOTDISPATCH_HOME'
ENV_FILE = 'SLOTDISPATCH_ENV_FILE'
ENV_MARKER = 'SLOTDISPATCH_ENV_MARKER'
ENV_BACKOFF = 'SLOTDISPATCH_BACKOFF'

DEFAULT_RSH = 'ssh -x'
DEFAULT_MARKER = 'SLOTDISPATCH_ENV'
DEFAULT_BACKOFF = 1.0

# relative to SLOTDISPATCH_HOME
ENV_FILE_RELPATH = 'etc/slotdispatch.sh'

LOCAL_ALIASES = frozenset({'localhost', '127.0.0.1', '::1'})

# run on the remote side to read its load average
REMOTE_LOAD_COMMAND = 'uptime'

# exit status when the remote shell binary itself cannot be started
TRANSPORT_FAILURE_STATUS = 255
USAGE_STATUS = 1
