# Repositories package.
#
# Storage-level access for each table, kept free of HTTP and
# serialisation concerns:
#
#   article_repo  — owner-scoped article queries and mutations
#   user_repo     — credential lookups and user inserts
#
# Every function takes the request's AsyncSession as its first argument
# and only flushes; the ``get_db`` dependency owns commit/rollback.
