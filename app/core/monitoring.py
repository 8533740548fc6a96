"""
Monitoring and health check utilities
"""

import psutil
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, Any
from pydantic import BaseModel, ConfigDict


class SystemHealth(BaseModel):
    """System health status model"""

    status: str
    timestamp: datetime
    uptime: float
    memory_usage: Dict[str, Any]
    disk_usage: Dict[str, Any]
    cpu_usage: float
    ffmpeg_state: str
    conversion_running: bool

    model_config = ConfigDict()


class HealthChecker:
    """Health checking with system metrics and converter state"""

    def __init__(self):
        self.start_time = time.time()

    def get_memory_info(self) -> Dict[str, Any]:
        """Get memory usage information"""
        memory = psutil.virtual_memory()
        return {
            "total": memory.total,
            "available": memory.available,
            "used": memory.used,
            "percentage": memory.percent,
        }

    def get_disk_info(self, path: str = "/") -> Dict[str, Any]:
        """Get disk usage information for the volume holding ``path``"""
        # The install directory may not exist before the first download
        target = Path(path)
        while not target.exists() and target != target.parent:
            target = target.parent
        disk = psutil.disk_usage(str(target))
        return {
            "path": path,
            "total": disk.total,
            "used": disk.used,
            "free": disk.free,
            "percentage": disk.percent,
        }

    def get_cpu_info(self) -> float:
        """Get CPU usage percentage since the previous call (non-blocking)"""
        return psutil.cpu_percent(interval=None)

    def get_system_health(
        self,
        *,
        ffmpeg_state: str = "idle",
        conversion_running: bool = False,
        disk_path: str = "/",
    ) -> SystemHealth:
        """Get comprehensive system health status"""
        uptime = time.time() - self.start_time
        memory = self.get_memory_info()
        disk = self.get_disk_info(disk_path)
        cpu = self.get_cpu_info()

        # Determine overall status
        status = "healthy"
        if ffmpeg_state == "error" or disk["percentage"] > 98:
            status = "unhealthy"
        elif memory["percentage"] > 90 or disk["percentage"] > 90:
            status = "warning"

        return SystemHealth(
            status=status,
            timestamp=datetime.now(),
            uptime=uptime,
            memory_usage=memory,
            disk_usage=disk,
            cpu_usage=cpu,
            ffmpeg_state=ffmpeg_state,
            conversion_running=conversion_running,
        )


# Global health checker instance
health_checker = HealthChecker()
