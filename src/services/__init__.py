"""Business logic services used by handlers.

Services are built lazily in handlers.dependencies so a cold start only pays
for the store client a route actually needs.
"""

# Do NOT import services here - use lazy loading in handlers instead
