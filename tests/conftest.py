import os

# Pin settings BEFORE any application imports happen so timestamps render
# the same on every machine regardless of the system timezone.
os.environ.setdefault("FIT2WALKING_TIMEZONE", "UTC")
