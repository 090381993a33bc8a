"""Fixed broker topic names consumed by the analytical store's ingestion."""

MODEL_TOPIC = "signoz-spans-topic"
INDEX_TOPIC = "signoz-index-v2-topic"
ERROR_TOPIC = "signoz-error-index-v2-topic"

ALL_TOPICS = (MODEL_TOPIC, INDEX_TOPIC, ERROR_TOPIC)
