# Marks `staffdesk.deps` as a package so routers can import
# `from ..deps.auth import get_current_user, require_admin`.
