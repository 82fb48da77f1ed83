"""
Engine Configuration
Centralized settings for the stay-prediction engine
"""

import os
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings from environment variables"""
    
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    
    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    AUDIT_LOGGING_ENABLED: bool = os.getenv("AUDIT_LOGGING_ENABLED", "true").lower() == "true"
    
    # Reject unknown level_of_care / mobility / cognition / baseline values
    # instead of zeroing their model contribution
    STRICT_CLINICAL_ENUMS: bool = os.getenv("STRICT_CLINICAL_ENUMS", "false").lower() == "true"
    
    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
