# Services package.
#
# Each module exposes a focused set of plain functions that encapsulate
# business logic for a single domain aggregate on top of the store:
#
#   user_service     — registration, login, current-user read/update
#   profile_service  — public profiles + follow / unfollow
#   article_service  — CRUD, listing, feed, favorites, tags
#   comment_service  — comments scoped to an article
#
# All service functions accept an InMemoryStore as their first argument;
# the router layer obtains it from the ``get_store`` dependency.  Password
# hashing, token issuance and slug probing happen here, between store
# calls, never while the store lock is held.
