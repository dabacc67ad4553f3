"""
Trip assistant.

Answers questions about a trip itinerary, proposes itinerary edits through
a tool-calling agent, and generates placeholder itineraries.
"""
