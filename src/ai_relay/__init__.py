"""
AI Relay package.

Provides:
- A single dispatcher that forwards generation requests to Cloudflare Workers AI
  or OpenRouter and normalises their responses
- FastAPI routes and a uvicorn launcher in front of it
"""
