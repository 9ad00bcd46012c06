# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business logic and database access for a single aggregate:
#
#   article_service   — listing, search and author-only mutation of Article
#   comment_service   — comments, with author-or-publisher deletion
#   bookmark_service  — the bookmark toggle engine and bookmark reads
#   user_service      — the user store behind principal ids
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.  Rejections are raised as ``newsroom.exceptions``
# errors and rendered by the handlers in ``newsroom.main``.
