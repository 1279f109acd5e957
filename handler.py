"""
AWS Lambda handler — Mangum wrapper for the Veracity FastAPI app.
"""

from mangum import Mangum

from veracity.main import app

handler = Mangum(app, lifespan="off")
