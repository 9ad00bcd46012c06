# Access-control package.
#
#   tokens     — Role, Principal and the bearer-token codec
#   gates      — FastAPI dependencies: authenticated gate and role gate
#   ownership  — per-resource ownership policy (article / comment)
#
# Bookmark toggling lives with the other persistence code in
# ``newsroom.services.bookmark_service``.
