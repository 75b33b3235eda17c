class AppError(Exception):
    """
    tradelens 可預期錯誤的基類。
    `tradelens` CLI 只攔截此類錯誤：記錄一行 error log 後以 exit code 1 結束，
    其他例外 (程式錯誤) 則照常帶 traceback 拋出。
    """

class ConfigurationError(AppError):
    """
    執行參數無法使用：
    .env / 環境變數無法通過 Settings 驗證 (如 INITIAL_CAPITAL 不是數字)，
    或以 --source file 執行卻沒有提供 --file / TRADES_FILE。
    """

class DataSourceError(AppError):
    """
    交易檔案讀不進來：檔案不存在、不是合法 JSON、頂層不是陣列，
    或某筆紀錄缺欄位、side/status 不合法、數值或時間戳無法解析。
    訊息會帶出問題紀錄的 id。
    """

class DataDestinationError(AppError):
    """`tradelens mock --output` 無法寫出交易 JSON 檔 (路徑不存在、權限不足等)。"""
