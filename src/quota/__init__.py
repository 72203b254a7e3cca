"""Quota management.

Daily request quotas

Every relayed chat request consumes one request from the daily quota of the
caller. Callers are identified either as registered users (quota is tracked
inside the user record kept in the user store) or as anonymous origins (quota
is tracked in process memory, keyed by the client network address).

Daily limits depend on the plan tier of the registered user; anonymous callers
have their own, lower, tier. A quota counter is created lazily on the first
request of a given day and it only grows during that day. There is no explicit
reset: the next day simply uses a new counter.

Quota is consumed before the upstream model is called and it is never
refunded, even if the upstream call fails.
"""
