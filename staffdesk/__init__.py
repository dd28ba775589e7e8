"""StaffDesk: employee management backend and its async client.

``staffdesk.main`` builds the FastAPI service; ``staffdesk.client`` holds the
session store, request pipeline, route gate and resource services that talk
to it; ``staffdesk.cli`` is the command-line front end.
"""

__version__ = "0.1.0"
