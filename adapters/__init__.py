"""
어댑터 레이어

외부 시스템(DB 등)과의 연동을 담당.
"""
