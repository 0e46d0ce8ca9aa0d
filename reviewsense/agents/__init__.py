"""
Agent implementations for ReviewSense.

Contains all agent modules that turn reviews into a report:
- Ingestion Agent
- Sentiment Classifier + Topic Extractor
- Aggregation (Stats, Keyword Frequency, Heat, Trend)
- Narrative (Key Points, Summary, Rating)
- Risk Detector + Suggestion Engine
- AI Augmenter
- Snapshot History Aggregator
"""
