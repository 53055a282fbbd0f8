from html import escape

CAUSE = "HopeSpring Foundation's Children's Fund"
RECEIPT_SUBJECT = "Your incredible support for the HopeSpring Foundation!"
FUNDRAISER_URL = "http://localhost:3000"

_STYLE = """
        body, table, td, a { -webkit-text-size-adjust: 100%; -ms-text-size-adjust: 100%; }
        table, td { mso-table-lspace: 0pt; mso-table-rspace: 0pt; }
        table { border-collapse: collapse !important; }
        body { height: 100% !important; margin: 0 !important; padding: 0 !important; width: 100% !important; font-family: 'Inter', Arial, sans-serif; }
        .container { width: 100%; max-width: 600px; margin: 0 auto; background-color: #1a1a1a; border-radius: 16px; overflow: hidden; border: 1px solid #333333; }
        .header { background-color: #4f46e5; color: #ffffff; padding: 48px 32px; text-align: center; }
        .header h1 { margin: 0; font-size: 32px; font-weight: 700; }
        .content { padding: 40px 32px; color: #d1d5db; line-height: 1.7; font-size: 16px; }
        .content p { margin: 0 0 20px; }
        .donation-details { background-color: #2a2a2a; border-radius: 12px; padding: 24px; margin: 28px 0; border-left: 4px solid #4f46e5; }
        .donation-details p { margin: 0 0 12px; font-size: 16px; }
        .donation-details strong { color: #ffffff; }
        .acknowledgement { background-color: #252244; border-radius: 12px; padding: 28px; margin: 28px 0; font-style: italic; color: #c7d2fe; text-align: center; font-size: 18px; line-height: 1.6; }
        .acknowledgement p { margin: 0; }
        .footer { background-color: #111111; color: #9ca3af; padding: 32px; text-align: center; font-size: 14px; }
        .footer a { color: #818cf8; text-decoration: none; font-weight: 500; }
"""


def render_receipt_html(donor_name: str, amount: str, transaction_id: str, acknowledgement: str) -> str:
    """Render the donor receipt. Every interpolated value is HTML-escaped."""
    name = escape(donor_name)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Thank You for Your Donation!</title>
    <style>{_STYLE}</style>
</head>
<body style="background-color: #000000; padding: 40px 24px;">
    <table border="0" cellpadding="0" cellspacing="0" width="100%">
        <tr>
            <td align="center">
                <table border="0" cellpadding="0" cellspacing="0" class="container">
                    <tr><td class="header"><h1>Thank You!</h1></td></tr>
                    <tr>
                        <td class="content">
                            <p>Dear {name},</p>
                            <p>We are incredibly grateful for your recent contribution to <strong>HopeSpring Foundation</strong>. Your support makes a real difference and helps us continue our mission.</p>
                            <div class="donation-details">
                                <p><strong>Amount:</strong> ${escape(amount)}</p>
                                <p><strong>Cause:</strong> {escape(CAUSE)}</p>
                                <p><strong>Transaction ID:</strong> {escape(transaction_id)}</p>
                            </div>
                            <div class="acknowledgement"><p>&ldquo;{escape(acknowledgement)}&rdquo;</p></div>
                            <p>Your kindness is what fuels our work. Thank you once again for your generous support.</p>
                        </td>
                    </tr>
                    <tr>
                        <td class="footer">
                            <p>&copy; 2025 HopeSpring Foundation. All Rights Reserved.</p>
                            <p><a href="{FUNDRAISER_URL}" target="_blank">Visit Our Fundraiser</a></p>
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>
"""
