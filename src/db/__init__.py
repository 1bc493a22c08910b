"""
Database package for the translation manager.
"""

from .models import Base, Page, PageProp, LangLink, TranslationStatus, StatusEditLog, StatusCode, NS_MAIN, ARTICLE_TYPE_PROP
from .database import Database

__all__ = ['Base', 'Page', 'PageProp', 'LangLink', 'TranslationStatus', 'StatusEditLog', 'StatusCode', 'NS_MAIN', 'ARTICLE_TYPE_PROP', 'Database']
