import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

class Config:
    # Database configuration
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///./toto.db')
    
    # Scraping configuration
    SCRAPING_TARGET_URL = os.getenv('SCRAPING_TARGET_URL', 'https://en.lottolyzer.com/history/singapore/toto')
    SCRAPING_USER_AGENT = os.getenv(
        'SCRAPING_USER_AGENT',
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
    )
    SCRAPING_TIMEOUT = int(os.getenv('SCRAPING_TIMEOUT', '30'))
    SCRAPING_MAX_RETRIES = int(os.getenv('SCRAPING_MAX_RETRIES', '3'))
    
    # Generator configuration
    CACHE_TTL_SECONDS = int(os.getenv('CACHE_TTL_SECONDS', '300'))
    MAX_ATTEMPTS_PER_COMBINATION = int(os.getenv('MAX_ATTEMPTS_PER_COMBINATION', '1000'))
    MAX_CONSECUTIVE_FAILURES = int(os.getenv('MAX_CONSECUTIVE_FAILURES', '10000'))
    FAIL_ON_CACHE_REFRESH_ERROR = os.getenv('FAIL_ON_CACHE_REFRESH_ERROR', 'False').lower() in ('true', '1', 't')
    
    # API server
    API_HOST = os.getenv('API_HOST', '127.0.0.1')
    API_PORT = int(os.getenv('API_PORT', '5000'))
    
    # Logging configuration
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    
    # Application settings
    DEBUG = os.getenv('DEBUG', 'False').lower() in ('true', '1', 't')
