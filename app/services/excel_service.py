"""
Excel processing service for guest list import/export
"""

import io
from typing import Any, Dict, List, Tuple
import numpy as np
import pandas as pd

from app.schemas.guest import Guest
from app.services.name_matching import normalize_name

class ExcelService:
    """Service for handling Excel operations"""

    REQUIRED_COLUMNS = ['name', 'allowed guests']
    OPTIONAL_COLUMNS = {
        'role': 'role',
        'email': 'email',
        'contact': 'contact',
        'table': 'table_number',
        'vip': 'is_vip',
        'added by': 'added_by',
        'message': 'message',
    }
    EXPORT_COLUMNS = [
        'Name', 'Role', 'Email', 'Contact', 'Status', 'Allowed Guests',
        'Table', 'VIP', 'Added By', 'Companions', 'Message'
    ]

    @staticmethod
    def create_template() -> bytes:
        """Create Excel template with the guest columns"""
        df = pd.DataFrame(columns=[
            'Name', 'Role', 'Email', 'Contact', 'Allowed Guests', 'Table', 'VIP', 'Added By'
        ])

        # Add sample data for guidance
        sample_data = [
            ['Sample Guest 1', 'Friend', 'guest1@example.com', '+1234567890', 2, 'T1', 'No', 'Bride'],
            ['Sample Guest 2', 'Cousin', '', '', 1, '', 'No', 'Groom'],
            ['Sample Guest 3', 'Godparent', '', '', 3, 'T2', 'Yes', 'Bride'],
        ]

        for row in sample_data:
            df.loc[len(df)] = row

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Guest List')

        return buffer.getvalue()

    @staticmethod
    def _column_mapping(df: pd.DataFrame) -> Dict[str, str]:
        """Map normalized header names to the frame's actual column names"""
        return {str(col).lower().strip(): col for col in df.columns}

    @staticmethod
    def validate_excel_structure(df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """Validate Excel file structure"""
        errors = []

        columns = ExcelService._column_mapping(df)
        missing_columns = [col for col in ExcelService.REQUIRED_COLUMNS if col not in columns]

        if missing_columns:
            errors.append(f"Missing required columns: {', '.join(missing_columns)}")

        return len(errors) == 0, errors

    @staticmethod
    def validate_data_constraints(df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """Validate allowed guest counts and duplicate names"""
        errors = []
        columns = ExcelService._column_mapping(df)

        if 'allowed guests' in columns:
            counts = pd.to_numeric(df[columns['allowed guests']], errors='coerce')
            for index, value in counts.items():
                if pd.isna(value) or not np.isfinite(value) or value < 1 or value != int(value):
                    errors.append(f"Row {index + 2}: Allowed Guests must be a whole number of at least 1")

        if 'name' in columns:
            names = df[columns['name']].dropna().astype(str)
            normalized = names.map(normalize_name)
            normalized = normalized[normalized != '']
            duplicates = normalized[normalized.duplicated(keep=False)]
            for name in sorted(set(duplicates)):
                errors.append(f"Duplicate guest name '{name}' in file")

        return len(errors) == 0, errors

    @staticmethod
    def parse_guest_rows(file_content: bytes) -> Tuple[bool, List[str], List[Dict[str, Any]]]:
        """Read an uploaded workbook into guest rows ready for bulk import"""
        try:
            df = pd.read_excel(io.BytesIO(file_content))
        except Exception as e:
            return False, [f"Error reading Excel file: {str(e)}"], []

        # Drop rows without a name before validating
        columns = ExcelService._column_mapping(df)
        if 'name' in columns:
            names = df[columns['name']]
            df = df[names.notna() & (names.astype(str).str.strip() != '')]

        valid_structure, structure_errors = ExcelService.validate_excel_structure(df)
        if not valid_structure:
            return False, structure_errors, []

        valid_data, data_errors = ExcelService.validate_data_constraints(df)
        if not valid_data:
            return False, data_errors, []

        rows = []
        for _, row in df.iterrows():
            guest = {
                'name': str(row[columns['name']]).strip(),
                'allowed_guests': int(row[columns['allowed guests']]),
            }
            for header, field in ExcelService.OPTIONAL_COLUMNS.items():
                if header not in columns:
                    continue
                value = row[columns[header]]
                if pd.isna(value):
                    continue
                if field == 'is_vip':
                    guest[field] = str(value).strip().lower() in ('yes', 'true', '1', 'y')
                else:
                    guest[field] = str(value).strip()
            rows.append(guest)

        return True, [], rows

    @staticmethod
    def export_guests(guests: List[Guest]) -> bytes:
        """Export the guest list to Excel"""
        data = []
        for guest in guests:
            companions = '; '.join(
                f"{c.name} ({c.relationship})" if c.relationship else c.name
                for c in guest.companions
                if c.name
            )
            data.append({
                'Name': guest.name,
                'Role': guest.role,
                'Email': guest.email,
                'Contact': guest.contact,
                'Status': guest.status,
                'Allowed Guests': guest.allowed_guests,
                'Table': guest.table_number,
                'VIP': 'Yes' if guest.is_vip else 'No',
                'Added By': guest.added_by,
                'Companions': companions,
                'Message': guest.message,
            })

        df = pd.DataFrame(data, columns=ExcelService.EXPORT_COLUMNS)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Guest List')

        return buffer.getvalue()
