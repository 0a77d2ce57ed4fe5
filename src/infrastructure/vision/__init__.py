"""
infrastructure.vision - HTTP adapters for the ingredient detection providers.

  openai_vision       primary: multimodal chat/completions with an inline image
  roboflow_detector   secondary: hosted object-detection models, tried in order
  response_parser     turns free-form LLM replies into candidate labels
"""
