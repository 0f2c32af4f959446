"""Allow running as: python -m quote_automation"""

from quote_automation.main import main

main()
