"""
Services layer - the in-memory stores and the recommendation engine.

DESIGN PRINCIPLE:
- Each store owns its backing collection exclusively
- Stores are explicit instances built once by the ServiceContainer
- Consumers react to store changes through each store's ChangeFeed
"""
