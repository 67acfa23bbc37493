import logging
from typing import List, Optional

import gspread
from google.oauth2.service_account import Credentials

logger = logging.getLogger(__name__)


class GoogleSheetsService:
    """
    A service to interact with the Google Sheets API.
    """

    def __init__(self, service_account_info: dict):
        self.creds = self._authenticate(service_account_info)
        self.client = gspread.authorize(self.creds)

    def _authenticate(self, service_account_info: dict) -> Credentials:
        """
        Authenticates with Google Sheets using service account credentials.

        Args:
            service_account_info: The service account mapping built from settings.

        Returns:
            The authenticated credentials object.
        """
        try:
            scopes = [
                "https://www.googleapis.com/auth/spreadsheets",
                "https://www.googleapis.com/auth/drive.file",
            ]
            creds = Credentials.from_service_account_info(
                service_account_info, scopes=scopes
            )
            logger.info("Successfully authenticated with Google Sheets.")
            return creds
        except ValueError as e:
            logger.error(f"Google service account credentials are malformed: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to authenticate with Google Sheets: {e}")
            raise

    def get_worksheet(
        self, spreadsheet_id: str, worksheet_name: str
    ) -> Optional[gspread.Worksheet]:
        """
        Gets a specific worksheet from a spreadsheet.

        Returns:
            A gspread.Worksheet object or None if not found.
        """
        try:
            spreadsheet = self.client.open_by_key(spreadsheet_id)
            return spreadsheet.worksheet(worksheet_name)
        except gspread.exceptions.SpreadsheetNotFound:
            logger.error(f"Spreadsheet with ID '{spreadsheet_id}' not found.")
            return None
        except gspread.exceptions.WorksheetNotFound:
            logger.error(
                f"Worksheet '{worksheet_name}' not found in spreadsheet '{spreadsheet_id}'."
            )
            return None
        except Exception as e:
            logger.error(
                f"An error occurred while accessing spreadsheet '{spreadsheet_id}': {e}"
            )
            return None

    def append_row(self, worksheet: gspread.Worksheet, row: List[str]):
        """
        Appends a single row to a worksheet.

        Args:
            worksheet: The gspread.Worksheet object to append to.
            row: A list of values for the new row.
        """
        try:
            worksheet.append_row(row, value_input_option="USER_ENTERED")
            logger.info("Successfully appended row to worksheet.")
        except Exception as e:
            logger.error(f"Failed to append row to worksheet: {e}")
            raise
