"""Infrastructure adapters for the DSP engine, input transfer and event storage."""
