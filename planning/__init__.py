"""
Teaching-unit plan generation.

Pipeline:
  1. Extraction:    textbook + curriculum justification to bounded text
  2. Orchestration: per unit: prompt → AI → validated plan → spreadsheet
"""
