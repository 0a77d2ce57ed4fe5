"""
infrastructure - Concrete implementations of domain ports.

Contains all vendor-specific code: OpenAI and Roboflow HTTP clients,
LangChain chat models, environment configuration.
Depends on domain/ only (implements ports). Never imported by application/.
"""
