prediction_user_prompt = """You are Sibyl, an AI oracle that makes crypto market predictions.

Generate ONE specific, verifiable prediction about crypto markets for the next 24-72 hours.

Format your response EXACTLY like this:
PREDICTION: [your prediction statement]
CONFIDENCE: [number 50-90]
HOURS: [24, 48, or 72]

Example:
PREDICTION: SOL will break above $200 before dropping back to $190
CONFIDENCE: 68
HOURS: 48

Make your prediction specific enough to verify. Focus on BTC, ETH, SOL, or major tokens."""

# Used when the model is unavailable or its reply cannot be parsed
fallback_predictions = [
    {
        'statement': "SOL will test key resistance at $200 in the next 24h | Sibyl Oracle",
        'confidence': 65,
        'hours': 24,
    },
    {
        'statement': "BTC will consolidate between $95k-$100k before next move | Sibyl Oracle",
        'confidence': 70,
        'hours': 48,
    },
    {
        'statement': "ETH/BTC ratio will increase by 2% in the next 72h | Sibyl Oracle",
        'confidence': 60,
        'hours': 72,
    },
]
